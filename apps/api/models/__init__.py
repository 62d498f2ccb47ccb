"""Models package."""

from .user import User
from .ad_space import AdSpace
from .ad_design import AdDesign
from .qr_code import QrCode
from .qr_code_scan import QrCodeScan
