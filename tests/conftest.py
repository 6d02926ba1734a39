"""Shared fixtures: a small Swagger document exercising every response strategy."""

import copy
import json

import pytest

from swaggermock.schema import Document


SAMPLE_SWAGGER = {
    'swagger': '2.0',
    'info': {'title': 'Signature API', 'version': '3.1'},
    'paths': {
        # Declared before the literal summary path on purpose
        '/signature/documents/{documentId}': {
            'parameters': [{'name': 'documentId', 'in': 'path', 'type': 'string'}],
            'get': {
                'operationId': 'getDocument',
                'responses': {
                    '200': {'description': 'OK', 'schema': {'$ref': '#/definitions/Document'}},
                    '404': {'description': 'Not found'}
                }
            }
        },
        '/signature/documents/summary': {
            'get': {
                'operationId': 'listSummaries',
                'responses': {
                    '200': {
                        'description': 'OK',
                        'examples': {
                            'application/json': {
                                'data': [{'documentId': 'abc', 'title': 'Contract'}],
                                'size': 1
                            }
                        }
                    }
                }
            }
        },
        '/signature/documents/{documentId}/status': {
            'get': {
                'responses': {
                    '200': {
                        'description': 'OK',
                        'schema': {
                            'type': 'array',
                            'items': {'type': 'string', 'enum': ['created', 'signed', 'expired']}
                        }
                    }
                }
            }
        },
        '/notification/webhooks/{id}': {
            'get': {
                'responses': {
                    '200': {
                        'description': 'OK',
                        'examples': {'application/json': {'id': 1, 'name': 'My webhook'}},
                        'schema': {'$ref': '#/definitions/Webhook'}
                    }
                }
            },
            'put': {
                'responses': {
                    '200': {'description': 'OK', 'schema': {'$ref': '#/definitions/Webhook'}}
                }
            },
            'delete': {
                'responses': {
                    '204': {'description': 'Deleted'}
                }
            }
        },
        '/notification/webhooks': {
            'get': {
                'responses': {
                    '200': {
                        'description': 'OK',
                        'schema': {'type': 'array', 'items': {'$ref': '#/definitions/Webhook'}}
                    }
                }
            },
            'post': {
                'responses': {
                    '400': {'description': 'Bad request'},
                    '201': {'description': 'Created', 'schema': {'$ref': '#/definitions/WebhookCreated'}}
                }
            }
        },
        '/audit/{id}/entries': {
            'get': {
                'responses': {
                    '200': {
                        'description': 'OK',
                        'schema': {'type': 'array', 'items': {'$ref': '#/definitions/AuditEntry'}}
                    }
                }
            }
        },
        '/files/{name}.json': {
            'get': {
                'responses': {
                    '200': {'description': 'OK', 'examples': {'application/json': {'file': True}}}
                }
            }
        },
        '/invalid/{unclosed': {
            'get': {
                'responses': {
                    '200': {'description': 'OK', 'examples': {'application/json': {'invalid': True}}}
                }
            }
        },
        '/broken/{ref}': {
            'get': {
                'responses': {
                    '200': {'description': 'OK', 'schema': {'$ref': '#/definitions/Missing'}}
                }
            }
        },
        '/errors/only': {
            'get': {
                'responses': {
                    '400': {'description': 'Bad request'},
                    '500': {'description': 'Server error'}
                }
            }
        },
        '/no-responses': {
            'get': {'operationId': 'noResponses'}
        }
    },
    'definitions': {
        'Document': {
            'type': 'object',
            'properties': {
                'documentId': {'type': 'string'},
                'title': {'type': 'string'},
                'createdAt': {'type': 'string', 'format': 'date-time'},
                'expires': {'type': 'string', 'format': 'date'},
                'pages': {'type': 'integer'},
                'price': {'type': 'number'},
                'signed': {'type': 'boolean'},
                'signers': {'type': 'array', 'items': {'type': 'string'}},
                'metadata': {'type': 'object'},
                'link': {'$ref': '#/definitions/Link'}
            }
        },
        'Webhook': {
            'type': 'object',
            'example': {'id': 42, 'name': 'Example webhook'},
            'properties': {
                'id': {'type': 'integer'},
                'name': {'type': 'string'}
            }
        },
        'WebhookCreated': {
            'type': 'object',
            'properties': {
                'id': {'type': 'integer'},
                'url': {'type': 'string'}
            }
        },
        'AuditEntry': {
            'type': 'object',
            'properties': {
                'action': {'type': 'string'},
                'at': {'type': 'string', 'format': 'date-time'}
            }
        },
        'Link': {
            'type': 'object',
            'properties': {'href': {'type': 'string'}}
        }
    }
}


@pytest.fixture
def swagger_dict():
    """Raw Swagger document (fresh copy per test)."""
    return copy.deepcopy(SAMPLE_SWAGGER)


@pytest.fixture
def document(swagger_dict):
    """Parsed sample document."""
    return Document.from_dict(swagger_dict)


@pytest.fixture
def swagger_file(tmp_path, swagger_dict):
    """Sample document written to a JSON file."""
    path = tmp_path / 'swagger.json'
    path.write_text(json.dumps(swagger_dict), encoding='utf-8')
    return path
