from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict
from .validator import validate

def check_menu(data: Dict[str, Any]) -> Dict[str, Any]:
    errors = validate(data)
    if errors:
        raise ValueError("Menu validation failed:\n" + "\n".join(errors))
    return data

def load_menu(path: str | Path) -> Dict[str, Any]:
    """Lê um cardápio-semente em JSON (restaurante, categorias, templates, produtos)."""
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    return check_menu(data)
