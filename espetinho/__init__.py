"""
                Espetinho Maria - Pedidos e Estoque

Ordering and inventory backend for a skewer bar: the public menu posts
WhatsApp orders, the admin panel manages products, stock, categories,
customers and orders.

Author: Equipe Espetinho Maria
Version: 2.0.0
License: MIT
"""

__version__ = "2.0.0"
__author__ = "Equipe Espetinho Maria"
