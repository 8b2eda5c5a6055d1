import logging

import colorlog


def setup_logging(name: str = "seed-monitor", level: str = "INFO"):
    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(
        f'%(log_color)s[{name}] %(asctime)s %(levelname)s %(name)s: %(message)s',
        datefmt='%H:%M:%S',
        log_colors={
            'DEBUG':    'cyan',
            'INFO':     'green',
            'WARNING':  'yellow',
            'ERROR':    'red',
            'CRITICAL': 'bold_red',
        }
    ))

    level_name = level.upper()
    if not isinstance(logging.getLevelName(level_name), int):
        raise ValueError(f"Unknown log level: {level}")

    root = colorlog.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(level_name)


def log_header(title: str, width: int = 64):
    logging.getLogger(__name__).info("\n\n" + f" {title} ".center(width, "="))
