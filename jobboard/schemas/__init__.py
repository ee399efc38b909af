"""
Schemas module - Request/Response schemas for API endpoints.

Mongo documents are returned as plain dicts (see services.mongo_service.serialize_doc);
schemas here describe what clients send and the small fixed-shape responses.
"""
