# Import all models so their tables register on Base
from synergy_crm.models.user_models import *
from synergy_crm.models.lead_models import *
from synergy_crm.models.client_models import *
from synergy_crm.models.vendor_models import *
from synergy_crm.models.requirement_models import *
from synergy_crm.models.quote_models import *
from synergy_crm.models.sales_order_models import *
from synergy_crm.models.expense_models import *
