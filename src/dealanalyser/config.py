import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from dealanalyser.schema import FINANCIAL_CONSTANTS, FinancialConstants

CONSTANTS_ENV_VAR = "DEALANALYSER_CONSTANTS"
LOG_LEVEL_ENV_VAR = "DEALANALYSER_LOG_LEVEL"

logger = logging.getLogger(__name__)


def load_constants(path: Optional[Union[str, Path]] = None) -> FinancialConstants:
    """Load financial constants, applying JSON overrides on top of the defaults.

    If no path is passed the DEALANALYSER_CONSTANTS environment variable is
    consulted. With neither, the process-wide defaults are returned as is.
    Only the keys present in the file are overridden; nested groups
    (appreciation_rates, ...) are merged key by key.
    """
    resolved = path or os.getenv(CONSTANTS_ENV_VAR)
    if not resolved:
        return FINANCIAL_CONSTANTS

    with Path(resolved).open("r", encoding="utf-8") as fh:
        overrides = json.load(fh)

    data = FINANCIAL_CONSTANTS.model_dump()
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value

    constants = FinancialConstants.model_validate(data)
    logger.info("Loaded financial constants from %s", resolved)
    return constants


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the run scripts."""
    resolved = (level or os.getenv(LOG_LEVEL_ENV_VAR) or "WARNING").upper()
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
