"""
로깅 유틸리티

애플리케이션 전반에서 사용할 로거를 설정합니다.
"""
from cardloom.core.config import settings

LOG_LEVEL = "DEBUG" if settings.DEPLOY_PHASE == "local" else "INFO"

cardloom_logger = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(asctime)s :: %(client_addr)s "%(request_line)s" %(status_code)s',
            "use_colors": settings.DEPLOY_PHASE != "prod",
        },
        "default": {
            "format": "%(levelname)s:     %(asctime)s - %(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "access": {
            "formatter": "access",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        "cardloom": {"handlers": ["default"], "level": LOG_LEVEL, "propagate": False},
    },
}
