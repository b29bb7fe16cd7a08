from time import perf_counter
from functools import wraps


def printyellow(msg: str, /, *args, **kwargs) -> None:
    print(f"\033[33m{msg}\033[0m", *args, **kwargs)


def printgreen(msg: str, /, *args, **kwargs) -> None:
    print(f"\033[32m{msg}\033[0m", *args, **kwargs)


class Timer:
    def __init__(self, label="block", *, logger=print):
        self.label = label
        self.logger = logger
        self.elapsed = 0.0

    def __enter__(self):
        self.start = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed = perf_counter() - self.start
        self.logger(f"[{self.label}] took {self.elapsed:.6f}s")


def timed(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        with Timer(func.__qualname__):
            return func(*args, **kwargs)

    return wrapper
