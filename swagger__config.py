"""
Swagger/OpenAPI configuration for the Barbershop Backend API
"""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Barbershop Backend API",
        "description": "Multi-tenant barbershop management: scheduling, clients, finances, loyalty, reviews and a public booking page",
        "version": "1.0.0",
    },
    "host": "",
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"',
        }
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Authentication", "description": "Owner accounts and tokens"},
        {"name": "Barbershop", "description": "Settings of the owner's barbershop"},
        {"name": "Public", "description": "Unauthenticated booking page endpoints"},
        {"name": "Appointments", "description": "Scheduling and status lifecycle"},
        {"name": "Dashboard", "description": "Headline statistics"},
        {"name": "Reports", "description": "Business reports and Excel export"},
        {"name": "Barbers", "description": "Staff roster"},
        {"name": "Services", "description": "Service menu and categories"},
        {"name": "Products", "description": "Retail products and stock"},
        {"name": "Clients", "description": "Client register"},
        {"name": "Finances", "description": "Ledger and finance summary"},
        {"name": "Loyalty", "description": "Loyalty plans, packages and coupons"},
        {"name": "Reviews", "description": "Client reviews and replies"},
    ],
    "definitions": {
        "Error": {
            "type": "object",
            "properties": {
                "message": {"type": "string"},
            },
        },
        "Barbershop": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "format": "uuid"},
                "ownerId": {"type": "string", "format": "uuid"},
                "name": {"type": "string"},
                "slug": {"type": "string", "example": "teixeira"},
                "openingTime": {"type": "string", "example": "09:00"},
                "closingTime": {"type": "string", "example": "19:00"},
                "workDays": {"type": "array", "items": {"type": "string"}},
            },
        },
        "Service": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "format": "uuid"},
                "name": {"type": "string", "example": "Corte"},
                "price": {"type": "string", "example": "55.00"},
                "duration": {"type": "integer", "example": 30},
                "isActive": {"type": "boolean"},
            },
        },
        "Appointment": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "format": "uuid"},
                "barberId": {"type": "string"},
                "serviceId": {"type": "string"},
                "clientId": {"type": "string"},
                "date": {"type": "string", "example": "2024-06-10"},
                "startTime": {"type": "string", "example": "09:00"},
                "endTime": {"type": "string", "example": "09:30"},
                "status": {
                    "type": "string",
                    "enum": ["pending", "confirmed", "completed", "cancelled", "no_show"],
                },
                "price": {"type": "string", "example": "55.00"},
                "confirmedAt": {"type": "string", "format": "date-time"},
                "completedAt": {"type": "string", "format": "date-time"},
                "cancelledAt": {"type": "string", "format": "date-time"},
            },
        },
        "User": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "format": "uuid"},
                "email": {"type": "string", "format": "email"},
                "firstName": {"type": "string"},
                "lastName": {"type": "string"},
                "role": {"type": "string", "example": "owner"},
            },
        },
    },
}
