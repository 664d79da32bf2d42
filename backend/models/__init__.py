"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PRINT CRM - Models Package                                                  ║
║                                                                              ║
║  Exports tous les modèles pour import facile                                 ║
║  from models import LeadCreate, OrderCreate, QuotationCreate, etc.           ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

# ==================== LEADS ====================
from .lead import (
    LeadStatus,
    VALID_LEAD_STATUSES,
    LEAD_STATUS_LABELS,
    AssignmentMethod,
    LeadCreate,
    LeadUpdate,
    CustomerOverride,
    ConversionOrder,
    ConversionFile,
    ConvertWithOrder,
    LeadOrderCreate,
    SourceType,
    LeadSourceCreate,
    LeadSourceUpdate,
    CampaignCreate,
    CampaignUpdate,
    WebhookLead,
    InteractionType,
    InteractionCreate,
)

# ==================== CLIENTS ====================
from .customer import CustomerCreate, CustomerUpdate

# ==================== COMMANDES ====================
from .order import (
    OrderStatus,
    PaymentStatus,
    OrderCreate,
    OrderUpdate,
    PaymentCreate,
    DesignFileCreate,
)

# ==================== SALES ====================
from .sales import (
    SalesEmployeeCreate,
    SalesEmployeeUpdate,
    ReorderItem,
    ReorderRequest,
    SpecializationUpsert,
    AllocationRuleCreate,
    AllocationRuleUpdate,
)

# ==================== CATALOGUE ====================
from .catalog import (
    ProductGroupCreate,
    ProductGroupUpdate,
    MaterialCreate,
    MaterialUpdate,
    LaborCostCreate,
    LaborCostUpdate,
)

# ==================== DEVIS ====================
from .quotation import (
    MaterialLine,
    LaborLine,
    QuotationItemInput,
    QuotationCreate,
    CompanyProfileUpdate,
)

# ==================== REPORTING ====================
from .marketing import KpiCreate, KpiUpdate, MarketingReportCreate, MarketingReportUpdate

# ==================== DESIGN ====================
from .design import TemplateType, DesignTemplateCreate, DesignTemplateUpdate, TemplateFromOrder

# ==================== IMPOSITION ====================
from .layout import PrintLayoutInput, BoxInput, BagInput
