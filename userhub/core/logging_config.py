import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    logger = logging.getLogger()
    if logger.handlers:
        return  # 중복 설정 방지
    logger.setLevel(level)
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(h)
    # httpx logs every upload request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
