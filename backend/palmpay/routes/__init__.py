# Routes package init
"""
PalmPay Backend — API Routes Package
======================================

Route Inventory:
    - catalog.py:  /api/products, /api/customers
    - orders.py:   /api/orders, /api/palm/complete-order/{id}, /api/transactions/{customerId}
    - devices.py:  /api/palm/devices, /api/palm/register, /api/palm/next-order,
                   /api/palm-devices, /api/palm-devices/auth-log
    - users.py:    /api/v1/users/...
    - palm.py:     /api/v1/palm/template, /verify, /generate-enrollment-qr, /enrollment/{token}
    - audit.py:    /api/v1/users/{id}/auth-logs, /api/v1/palm/device-logs
    - health.py:   /health

Routes stay thin: extract the request data, call a service singleton,
wrap the result in its response envelope.
"""
