# Routes package init
"""
CaseFamily Backend: API Routes Package
=========================================

Route Inventory:
    - clients.py: GET    /api/clients
                  GET    /api/clients/search?familyName=
                  POST   /api/clients
                  PUT    /api/clients/{clientId}
                  DELETE /api/clients/{clientId}
                  GET    /api/clients/{clientId}/family
                  POST   /api/clients/{clientId}/relatives
                  PUT    /api/clients/{clientId}/relatives
                  DELETE /api/clients/{clientId}/relatives/{relativeId}
    - health.py:  GET    /health

Routes stay thin: read the request, call a service, return its result.
"""
