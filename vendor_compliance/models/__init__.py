# Import separated model groups so callers can use `from vendor_compliance.models import X`

from .user_models import *
from .document_models import *
from .report_models import *
