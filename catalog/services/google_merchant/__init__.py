from .auth import GoogleMerchantAuth
from .client import GoogleMerchantClient
from .service import GoogleMerchantService
