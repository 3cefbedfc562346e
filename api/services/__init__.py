"""Service layer for business logic.

Services keep routes thin and focused on HTTP handling:
- certificates_service: order fields to a rendered certificate
- payments_service: Stripe payment intents and webhook events
- fulfillment_service: forwarding paid orders to the automation webhook
- canva_service / canva_auth_service: Canva Connect API and OAuth

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Rendering / external APIs

Services should NOT know about HTTP request/response details; they raise
domain errors and routes map those to status codes.
"""
