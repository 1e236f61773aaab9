import logging


def log_setup(name: str, level, file: str = 'pathwise.log') -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    # modules may be reloaded; never stack a second file handler on the same logger
    if not any(isinstance(handler, logging.FileHandler) for handler in logger.handlers):
        fhandler = logging.FileHandler(filename=file, mode='a', delay=True)
        fhandler.setFormatter(
            logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(fhandler)
    return logger
