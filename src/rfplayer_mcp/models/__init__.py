"""Data models for parrot devices and status payloads."""

from .device import ParrotDevice
from .status import StatusResponse
