"""Site rendering helpers."""

from __future__ import annotations

from pathlib import Path

from jinja2 import DictLoader, Environment, select_autoescape

from ..injector import inject_overrides
from .models import Site, section_items
from .styles import PUBLISHED_SCOPE, stylesheet_for_generated

SITE_BODY_TEMPLATE = """\
<div class="site-body template-{{ template_id }}">
<header class="px-6 py-4 flex justify-between items-center">
  <nav role="navigation" class="flex gap-6 text-sm">
    <a href="#over">Over mij</a>
    <a href="#diensten">Diensten</a>
    <a href="#contact">Contact</a>
  </nav>
</header>

<section id="hero" data-section="hero" class="px-6 py-20 reveal">
  <div class="max-w-5xl mx-auto grid md:grid-cols-2 gap-10 items-center">
    <div>
      <span class="text-sm uppercase tracking-widest text-teal-700">{{ beroep }}</span>
      <h1 class="text-4xl font-semibold">{{ hero.titel or naam }}</h1>
      <p class="text-lg mt-4">{{ hero.subtitel or tagline }}</p>
      {% if hero.beschrijving %}<p class="mt-2">{{ hero.beschrijving }}</p>{% endif %}
      <a href="#contact" class="inline-block mt-8 px-6 py-3 rounded-lg bg-teal-600 text-white">{{ cta.knop or "Neem contact op" }}</a>
    </div>
    {% if foto %}<img src="{{ foto }}" alt="{{ naam }}" class="rounded-2xl w-full object-cover">{% endif %}
  </div>
</section>

{% if over_mij %}
<section id="over" data-section="over" class="px-6 py-16 reveal"{% if sfeerfoto %} style="background-image: url('{{ sfeerfoto }}'); background-size: cover;"{% endif %}>
  <div class="max-w-3xl mx-auto">
    <h2 class="text-3xl">Over mij</h2>
    <p class="mt-4">{{ over_mij.intro }}</p>
    {% if over_mij.body %}<p class="mt-4">{{ over_mij.body }}</p>{% endif %}
  </div>
</section>
{% endif %}

{% if voor_wie_items %}
<section id="voorwie" data-section="voorwie" class="px-6 py-16 reveal">
  <div class="max-w-5xl mx-auto">
    <h2 class="text-3xl">{{ voor_wie.titel or "Voor wie" }}</h2>
    <div class="grid md:grid-cols-3 gap-6 mt-8">
      {% for groep in voor_wie_items %}
      <div class="rounded-xl border p-6">
        <h3 class="text-xl">{{ groep.titel }}</h3>
        <p class="mt-2">{{ groep.tekst }}</p>
      </div>
      {% endfor %}
    </div>
  </div>
</section>
{% endif %}

{% if diensten_items %}
<section id="diensten" data-section="diensten" class="px-6 py-16 reveal">
  <div class="max-w-5xl mx-auto">
    <h2 class="text-3xl">{{ diensten.titel or "Diensten" }}</h2>
    {% if diensten.intro %}<p class="mt-2">{{ diensten.intro }}</p>{% endif %}
    <div class="grid md:grid-cols-3 gap-6 mt-8">
      {% for dienst in diensten_items %}
      <div class="rounded-xl border p-6">
        {% if dienst.icon %}<span class="material-symbols-outlined">{{ dienst.icon }}</span>{% endif %}
        <h3 class="text-xl">{{ dienst.naam }}</h3>
        {% if dienst.beschrijving %}<p class="mt-2">{{ dienst.beschrijving }}</p>{% endif %}
      </div>
      {% endfor %}
    </div>
  </div>
</section>
{% endif %}

{% if werkervaring_items %}
<section id="werkervaring" data-section="werkervaring" class="px-6 py-16 reveal">
  <div class="max-w-3xl mx-auto">
    <h2 class="text-3xl">Werkervaring</h2>
    <div class="space-y-6 mt-8">
      {% for item in werkervaring_items %}
      <div class="border-l-2 border-teal-600 pl-4">
        <h3 class="text-lg">{{ item.functie }}</h3>
        <p>{{ item.werkgever }}</p>
      </div>
      {% endfor %}
    </div>
  </div>
</section>
{% endif %}

{% if faq_items %}
<section id="faq" data-section="faq" class="px-6 py-16 reveal">
  <div class="max-w-3xl mx-auto">
    <h2 class="text-3xl">{{ faq.titel or "Veelgestelde vragen" }}</h2>
    <div class="divide-y mt-8">
      {% for item in faq_items %}
      <div class="py-4">
        <h3 class="text-lg">{{ item.vraag }}</h3>
        <p class="mt-2">{{ item.antwoord }}</p>
      </div>
      {% endfor %}
    </div>
  </div>
</section>
{% endif %}

<section id="contact" data-section="contact" class="px-6 py-16 reveal">
  <div class="max-w-3xl mx-auto text-center">
    <h2 class="text-3xl">{{ contact.titel or "Contact" }}</h2>
    {% if contact.intro %}<p class="mt-4">{{ contact.intro }}</p>{% endif %}
    {% if email %}<a href="mailto:{{ email }}" class="inline-block mt-6 px-6 py-3 rounded-full bg-teal-700 text-white">{{ contact.cta or "Stuur een e-mail" }}</a>{% endif %}
    {% if telefoon %}<p class="mt-4">{{ telefoon }}</p>{% endif %}
  </div>
</section>

<footer class="px-6 py-8 text-sm">
  <p>&copy; {{ naam }}{% if werkgebied %} &middot; {{ werkgebied | join(", ") }}{% endif %}</p>
</footer>
</div>
"""

PAGE_TEMPLATE = """\
<!doctype html>
<html lang="nl">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title }}</title>
  {% if description %}<meta name="description" content="{{ description }}">{% endif %}
  {% if stylesheet %}<style>
{{ stylesheet | safe }}
  </style>{% endif %}
</head>
<body>
<div class="{{ container_class }}">
{{ body | safe }}
</div>
</body>
</html>
"""


def _env() -> Environment:
    return Environment(
        loader=DictLoader({"site_body.html.j2": SITE_BODY_TEMPLATE, "page.html.j2": PAGE_TEMPLATE}),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )


def _mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


def render_body(site: Site) -> str:
    """Render the site sections from the content document, without overrides."""
    content = site.content or {}
    gen = site.generated_content or {}
    werkgebied = content.get("werkgebied") or []
    if isinstance(werkgebied, str):
        werkgebied = [werkgebied]
    return _env().get_template("site_body.html.j2").render(
        template_id=site.template_id,
        beroep=site.beroep,
        naam=content.get("naam", ""),
        tagline=content.get("tagline", ""),
        foto=content.get("foto"),
        sfeerfoto=content.get("sfeerfoto"),
        email=content.get("email"),
        telefoon=content.get("telefoon"),
        werkgebied=werkgebied,
        hero=gen.get("hero") or {},
        over_mij=gen.get("overMij") or {},
        voor_wie=_mapping(gen.get("voorWie")),
        voor_wie_items=section_items(gen, "voorwie"),
        diensten=_mapping(gen.get("diensten")),
        diensten_items=section_items(gen, "diensten"),
        werkervaring_items=section_items(gen, "werkervaring"),
        faq=_mapping(gen.get("faq")),
        faq_items=section_items(gen, "faq"),
        contact=gen.get("contact") or {},
        cta=gen.get("cta") or {},
    )


def render_page(site: Site, body: str, stylesheet: str = "", container_class: str = "site-content") -> str:
    seo = (site.generated_content or {}).get("seo") or {}
    title = seo.get("metaTitle") or (site.content or {}).get("naam") or site.subdomain
    return _env().get_template("page.html.j2").render(
        title=title,
        description=seo.get("metaDescription", ""),
        stylesheet=stylesheet,
        body=body,
        container_class=container_class,
    )


def export_site(site: Site, output_dir: str | Path) -> Path:
    """Write the published page with all overrides applied."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    body = inject_overrides(render_body(site), site.overrides)
    stylesheet = stylesheet_for_generated(site.generated_content, PUBLISHED_SCOPE).render()
    html = render_page(site, body, stylesheet=stylesheet, container_class="site-content")
    target = output_dir / "index.html"
    target.write_text(html, encoding="utf-8")
    return target
