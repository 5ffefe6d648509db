from .commands import AddPayment, AddSale, SaleItem, UpdateProduct, parse_command
from .dispatcher import execute_command

__all__ = ['AddPayment', 'AddSale', 'SaleItem', 'UpdateProduct', 'parse_command', 'execute_command']
