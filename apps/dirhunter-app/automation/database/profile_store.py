"""
JSON stores for DirHunter:
1. site-configs.json - directory name -> SiteConfig (fully replaced on every analysis)
2. field-analysis.json - field statistics and per-site extraction output
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from loguru import logger
from pydantic import ValidationError

from models import FieldStat, SiteConfig
from utils.helpers import utc_timestamp


def _write_json(path: str, data: Any):
    target = Path(path)
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


# ==================== SITE CONFIGS ====================

def serialize_site_configs(configs: Dict[str, SiteConfig]) -> str:
    """Serialized store content. Identical configs give identical text."""
    data = {name: config.to_dict() for name, config in configs.items()}
    return json.dumps(data, indent=2, ensure_ascii=False)


def save_site_configs(path: str, configs: Dict[str, SiteConfig]):
    """Replace the site profile store with the given configs."""
    target = Path(path)
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(serialize_site_configs(configs), encoding="utf-8")
    logger.info(f"💾 Saved {len(configs)} site configuration(s) to {path}")


def load_site_configs(path: str) -> Dict[str, SiteConfig]:
    """
    Load site profiles keyed by directory name.

    A missing or unreadable file gives an empty mapping, and entries that do
    not validate are dropped, so those directories fall back to a plain visit.
    """
    source = Path(path)
    if not source.exists():
        logger.warning(f"⚠️ No site configurations found at {path} - run 'analyze' first")
        return {}

    try:
        with open(source, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"⚠️ Could not read site configurations ({path}): {e}")
        return {}

    if not isinstance(raw, dict):
        logger.warning(f"⚠️ Site configurations in {path} are not an object - ignoring")
        return {}

    configs: Dict[str, SiteConfig] = {}
    for name, entry in raw.items():
        try:
            configs[name] = SiteConfig.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid site configuration for {name}: {e.error_count()} error(s)")

    logger.info(f"📂 Loaded {len(configs)} site configuration(s)")
    return configs


# ==================== FIELD ANALYSIS ====================

def build_field_analysis(field_stats: List[FieldStat], per_site: List[Dict[str, Any]],
                         total_sites: int) -> Dict[str, Any]:
    """Field statistics store document."""
    return {
        "analyzedAt": utc_timestamp(),
        "totalSites": total_sites,
        "successfulAnalysis": sum(1 for site in per_site if "error" not in site),
        "fieldRequirements": [stat.to_dict() for stat in field_stats],
        "perSiteAnalysis": per_site,
    }


def save_field_analysis(path: str, analysis: Dict[str, Any]):
    _write_json(path, analysis)
    logger.info(f"💾 Field analysis saved to {path}")


def save_json(path: str, data: Any):
    """Write any JSON document (generated values, exports)."""
    _write_json(path, data)
