"""
Name-based lookup of stage implementations.

Stage package `fecsim.stages.<stage>` holds a `modules/` subpackage. Every
public module there provides a default-constructible `Config` and
`build(cfg, **sizes)`. Names starting with "_" are shared helpers, not
selectable implementations.
"""

from __future__ import annotations

from types import ModuleType
from typing import Any, List, Tuple
import importlib
import pkgutil


def _stage_name(stage_package: str) -> str:
    return stage_package.rsplit(".", 1)[-1]


def list_modules(stage_package: str) -> List[str]:
    pkg = importlib.import_module(f"{stage_package}.modules")
    names = [m.name for m in pkgutil.iter_modules(pkg.__path__)]
    return sorted(n for n in names if not n.startswith("_"))


def import_module(stage_package: str, name: str) -> ModuleType:
    if not isinstance(name, str) or not name:
        raise ValueError(f"{_stage_name(stage_package)} cfg.module must be a non-empty string")
    if name.startswith("_"):
        raise ValueError(f"{_stage_name(stage_package)} module '{name}' is private")
    return importlib.import_module(f"{stage_package}.modules.{name}")


def resolve(stage_package: str, cfg: Any) -> Tuple[ModuleType, Any]:
    """
    Import cfg.module and return it with its config (cfg.module_cfg, or its defaults).
    """
    mod = import_module(stage_package, cfg.module)
    stage = _stage_name(stage_package)

    if not hasattr(mod, "Config"):
        raise AttributeError(f"{stage} module '{cfg.module}' missing Config")
    if not callable(getattr(mod, "build", None)):
        raise AttributeError(f"{stage} module '{cfg.module}' missing build")

    module_cfg = cfg.module_cfg if cfg.module_cfg is not None else mod.Config()
    return mod, module_cfg
