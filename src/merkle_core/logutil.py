import logging
import re
from typing import Iterable, Union


class RedactingFilter(logging.Filter):
    """Redact secret-bearing fields (signing key material) from log records."""

    _PATTERN = re.compile(r"\b(secret|password|token|sk|sk_b64)=\S+", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        msg = str(record.getMessage())
        redacted = self._PATTERN.sub(r"\1=***", msg)
        if redacted != msg:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(
    level: Union[int, str] = logging.INFO,
    loggers: Iterable[str] = ("merkle_core", "merkle_sdk", "merkle_cli"),
) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    f = RedactingFilter()
    # logger-level filters do not apply to child loggers; handlers see everything
    for h in logging.getLogger().handlers:
        h.addFilter(f)
    for name in loggers:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.addFilter(f)
