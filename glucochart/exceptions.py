class ChartError(Exception): ...


class ConfigError(ChartError): ...


class ScheduleError(ChartError): ...


class IngestError(ChartError): ...


def require(condition: bool, message: str, exc: type[ChartError] = ChartError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
