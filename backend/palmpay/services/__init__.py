# Services package init
"""
PalmPay Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   One stateless singleton per resource. Each method receives the
       request's AsyncSession, runs one query (or a short fixed sequence),
       and returns Pydantic response models.

Service Inventory:
    - CatalogService: products and customers
    - OrderService:   order create/list/complete, customer transactions
    - DeviceService:  kiosk registration, bearer lookup, next order, device auth log
    - UserService:    users, cards, manual-cascade deletion
    - PalmService:    palm templates, verification candidates, enrollment tokens
    - AuditService:   user auth-log pages, device log feed
"""
