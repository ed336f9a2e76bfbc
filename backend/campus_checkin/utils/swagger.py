"""Swagger/OpenAPI configuration for the application."""
from flask_swagger_ui import get_swaggerui_blueprint

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'

def get_swagger_blueprint():
    """Create and return swagger UI blueprint."""
    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            'app_name': "Campus Check-in API",
            'defaultModelsExpandDepth': -1,
            'docExpansion': 'list',
            'validatorUrl': None,
        }
    )
    return swaggerui_blueprint

def _json_body(schema_ref: str) -> dict:
    return {
        "required": True,
        "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{schema_ref}"}}}
    }

def _responses(*codes) -> dict:
    descriptions = {
        200: "Success",
        201: "Created",
        400: "Invalid request or check-in rejected",
        401: "Missing or invalid token",
        403: "Wrong role or not the owner",
        404: "Not found",
        409: "Conflict: attendance already recorded or course code taken",
        500: "Internal error"
    }
    responses = {}
    for code in codes:
        schema = "Error" if code >= 400 else "Success"
        responses[str(code)] = {
            "description": descriptions[code],
            "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{schema}"}}}
        }
    return responses

def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    secured = [{"bearerAuth": []}]
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "Campus Check-in API",
            "description": "Class attendance with QR, GPS geofence and clock-skew verification",
            "version": "1.0.0"
        },
        "servers": [
            {
                "url": "http://127.0.0.1:5000",
                "description": "Development server"
            }
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "CheckInRequest": {
                    "type": "object",
                    "required": ["sessionId", "latitude", "longitude", "clientTimestamp"],
                    "properties": {
                        "sessionId": {"type": "string", "format": "uuid"},
                        "latitude": {"type": "number", "minimum": -90, "maximum": 90},
                        "longitude": {"type": "number", "minimum": -180, "maximum": 180},
                        "accuracy": {"type": "number", "minimum": 0, "default": 0},
                        "clientTimestamp": {"type": "string", "format": "date-time"}
                    }
                },
                "CheckInResponse": {
                    "type": "object",
                    "properties": {
                        "success": {"type": "boolean"},
                        "sessionId": {"type": "string", "format": "uuid"},
                        "status": {"type": "string", "enum": ["present", "late"]},
                        "locationVerified": {"type": "boolean"}
                    }
                },
                "CreateSession": {
                    "type": "object",
                    "required": ["course_id"],
                    "properties": {
                        "course_id": {"type": "integer"},
                        "duration_minutes": {"type": "integer"},
                        "latitude": {"type": "number"},
                        "longitude": {"type": "number"},
                        "radius_meters": {"type": "number"}
                    }
                },
                "Credentials": {
                    "type": "object",
                    "required": ["email", "password"],
                    "properties": {
                        "email": {"type": "string", "format": "email"},
                        "password": {"type": "string"}
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "success": {"type": "boolean", "example": False},
                        "code": {
                            "type": "string",
                            "enum": [
                                "invalid_request", "session_not_found", "session_inactive",
                                "session_expired", "clock_skew", "out_of_range",
                                "already_present", "unauthorized", "forbidden",
                                "not_found", "internal_error"
                            ]
                        },
                        "message": {"type": "string"}
                    }
                },
                "Success": {
                    "type": "object",
                    "properties": {
                        "success": {"type": "boolean", "example": True},
                        "message": {"type": "string"},
                        "data": {"type": "object"}
                    }
                }
            }
        },
        "paths": {
            "/api/auth/login": {
                "post": {
                    "tags": ["Auth"],
                    "summary": "Log in and receive JWT tokens",
                    "requestBody": _json_body("Credentials"),
                    "responses": _responses(200, 400, 401)
                }
            },
            "/api/attendance/checkin": {
                "post": {
                    "tags": ["Attendance"],
                    "summary": "Check in to a class session",
                    "security": secured,
                    "requestBody": _json_body("CheckInRequest"),
                    "responses": {
                        "200": {
                            "description": "Checked in",
                            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/CheckInResponse"}}}
                        },
                        **_responses(400, 401, 403, 404, 409, 500)
                    }
                }
            },
            "/api/attendance/my-records": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "Student's own attendance history",
                    "security": secured,
                    "responses": _responses(200, 401, 403)
                }
            },
            "/api/attendance/status/{session_id}": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "Student's check-in status for one session",
                    "security": secured,
                    "parameters": [
                        {"name": "session_id", "in": "path", "required": True, "schema": {"type": "string"}}
                    ],
                    "responses": _responses(200, 401, 403, 404)
                }
            },
            "/api/student/courses": {
                "get": {
                    "tags": ["Student"],
                    "summary": "Enrolled courses with attendance summaries",
                    "security": secured,
                    "responses": _responses(200, 401, 403)
                }
            },
            "/api/courses/{course_id}": {
                "get": {
                    "tags": ["Courses"],
                    "summary": "Course details and session summaries",
                    "security": secured,
                    "parameters": [
                        {"name": "course_id", "in": "path", "required": True, "schema": {"type": "integer"}}
                    ],
                    "responses": _responses(200, 401, 403, 404)
                },
                "put": {
                    "tags": ["Courses"],
                    "summary": "Update a course",
                    "security": secured,
                    "parameters": [
                        {"name": "course_id", "in": "path", "required": True, "schema": {"type": "integer"}}
                    ],
                    "responses": _responses(200, 400, 401, 403, 404, 409)
                },
                "delete": {
                    "tags": ["Courses"],
                    "summary": "Delete a course and its sessions",
                    "security": secured,
                    "parameters": [
                        {"name": "course_id", "in": "path", "required": True, "schema": {"type": "integer"}}
                    ],
                    "responses": _responses(200, 401, 403, 404)
                }
            },
            "/api/sessions/": {
                "post": {
                    "tags": ["Sessions"],
                    "summary": "Open a class session",
                    "security": secured,
                    "requestBody": _json_body("CreateSession"),
                    "responses": _responses(201, 400, 401, 403, 404)
                }
            },
            "/api/sessions/{session_id}/end": {
                "post": {
                    "tags": ["Sessions"],
                    "summary": "Close a session and finalize attendance",
                    "security": secured,
                    "parameters": [
                        {"name": "session_id", "in": "path", "required": True, "schema": {"type": "string"}}
                    ],
                    "responses": _responses(200, 401, 403, 404)
                }
            },
            "/api/qr/generate/{session_id}": {
                "post": {
                    "tags": ["QR"],
                    "summary": "Generate the session QR code",
                    "security": secured,
                    "parameters": [
                        {"name": "session_id", "in": "path", "required": True, "schema": {"type": "string"}}
                    ],
                    "responses": _responses(200, 400, 401, 403, 404)
                }
            }
        }
    }
