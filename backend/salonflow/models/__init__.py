from .auth import User, SessionToken
from .security import SecurityEvent
from .catalog import Service
from .service_logs import ServiceLog
from .inventory import InventoryItem, StockAdjustment
from .reports import DailyReport, DailyReportBarberLine

__all__ = [
    'User', 'SessionToken', 'SecurityEvent',
    'Service', 'ServiceLog',
    'InventoryItem', 'StockAdjustment',
    'DailyReport', 'DailyReportBarberLine',
]
