from dataclasses import dataclass


@dataclass
class ConfigStore:
    nominal_deviation: float = 5.0      # |deviation - 100| below this renders black
    elevated_deviation: float = 10.0    # below this renders blue, otherwise red
    alert_deviation: float = 20.0       # at or above this a notification is sent
    max_duration_average: float = 30.0
    duration_divisor: int = 1000        # request durations are recorded in ms
    timezone: str = "CET"
    status_page_url: str = "http://seedmonitor.0-2-1.net:8080/"
    notify_timeout: int = 5
    notify_workers: int = 4
