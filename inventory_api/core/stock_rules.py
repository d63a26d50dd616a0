from inventory_api.core.constants import IN_STOCK, LOW_STOCK, OUT_OF_STOCK


def stock_status(quantity, min_quantity):
    quantity = float(quantity or 0)
    min_quantity = float(min_quantity or 0)
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity <= min_quantity:
        return LOW_STOCK
    return IN_STOCK


def profit_margin(price, cost):
    cost = float(cost or 0)
    if cost == 0:
        return 0.0
    return round((float(price or 0) - cost) / cost * 100, 2)
