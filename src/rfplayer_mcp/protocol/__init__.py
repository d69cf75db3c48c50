"""Protocol layer: line framing, command builders, and status parsing."""

from .framing import build_frame, parse_frame
from .commands import Command, StatusCategory, StatusFormat, FrequencyBand, id_to_x10
from .parser import decode_status, parse_status, extract_parrot_devices
