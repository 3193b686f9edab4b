from pathlib import Path
import importlib
import sys
import traceback

root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

MODULES = (
    'siteeditor.core.models',
    'siteeditor.core.styles',
    'siteeditor.core.backend',
    'siteeditor.core.generator',
    'siteeditor.injector',
    'siteeditor.preview.editable',
    'siteeditor.ui.main_window',
)


def try_import(name):
    print(f"Testing import: {name}")
    try:
        importlib.import_module(name)
        print(f"{name} OK")
        return True
    except Exception:
        print(f"{name} ERR")
        traceback.print_exc()
        return False


if __name__ == '__main__':
    results = [try_import(name) for name in MODULES]
    sys.exit(0 if all(results) else 1)
