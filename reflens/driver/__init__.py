from reflens.driver.base import PageDriver
from reflens.driver.playwright import PlaywrightDriver

__all__ = ["PageDriver", "PlaywrightDriver"]
