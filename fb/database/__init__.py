from .connection import DatabaseManager, init_database
from .models import Base, Account, Customer, Manufacturer, Quality, Order

__all__ = ['DatabaseManager', 'init_database', 'Base', 'Account', 'Customer', 'Manufacturer', 'Quality', 'Order']
