from .auth import User, SessionToken
from .catalog import Product, StockHistoryEntry
from .contacts import Contact
from .sales import Transaction, TransactionItem, Payment
from .expenses import Expense
from .restocks import StockInEntry, StockInItem
from .settings import CompanyInfo

__all__ = [
    'User', 'SessionToken',
    'Product', 'StockHistoryEntry',
    'Contact',
    'Transaction', 'TransactionItem', 'Payment',
    'Expense',
    'StockInEntry', 'StockInItem',
    'CompanyInfo',
]
