"""Исключения пакета."""


class SvmParamsError(ValueError):
    """Некорректные гиперпараметры или входные данные, обнаруженные до запуска солвера."""
