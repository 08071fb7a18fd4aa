"""
Postman Generator - request collection for exploring a generated API.

One folder per class with the five CRUD requests the generated controller
serves under /api/<lower>. Output follows the Postman v2.1 collection schema.
"""

import json
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.core.logging_config import logger
from app.schemas.diagram_model import AttributeType, ClassAttribute
from app.services.spring_generator.loader import load_diagram, resolve_names
from app.services.spring_generator.naming import lower_first, plural

POSTMAN_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"

JSON_HEADERS = [
    {"key": "Accept", "value": "application/json"},
    {"key": "Content-Type", "value": "application/json"},
]

EXAMPLE_NUMBERS = {
    AttributeType.INT: 123,
    AttributeType.LONG: 123456789,
}


def example_value(attr: ClassAttribute) -> Any:
    if attr.name == "id":
        return 1
    if attr.type in EXAMPLE_NUMBERS:
        return EXAMPLE_NUMBERS[attr.type]
    return f"Example{attr.raw_type or 'String'}"


class PostmanGeneratorService:
    def __init__(self, base_url: Optional[str] = None, collection_name: Optional[str] = None):
        self._base_url = base_url
        self._collection_name = collection_name

    @property
    def base_url(self) -> str:
        return self._base_url or settings.COLLECTION_BASE_URL

    @property
    def collection_name(self) -> str:
        return self._collection_name or settings.COLLECTION_NAME

    def generate_collection(self, raw: Any) -> Dict[str, Any]:
        """Build the collection document for a diagram model"""
        resolved = resolve_names(load_diagram(raw))

        folders = [
            {
                "name": name,
                "item": self._class_requests(name, resolved.attributes[name]),
            }
            for name in resolved.ordered_names
        ]

        logger.log_generation_event(
            "PostmanGenerator",
            f"Generated collection with {len(folders)} resources",
            class_count=len(folders),
        )
        return {
            "info": {
                "name": self.collection_name,
                "description": "CRUD requests for every entity of the generated Spring Boot API",
                "schema": POSTMAN_SCHEMA,
            },
            "item": folders,
            "variable": [
                {"key": "baseUrl", "value": self.base_url, "type": "string"},
            ],
        }

    def _class_requests(self, name: str, attributes: List[ClassAttribute]) -> List[Dict[str, Any]]:
        lower = lower_first(name)
        collection_url = self._url(lower)
        item_url = self._url(lower, f"{{{{{lower}Id}}}}")
        body = json.dumps({attr.name: example_value(attr) for attr in attributes}, indent=2)

        return [
            self._request(f"Get All {plural(name)}", "GET", collection_url, f"Get all {name} records"),
            self._request(f"Get {name} by ID", "GET", item_url, f"Get one {name} by ID"),
            self._request(f"Create {name}", "POST", collection_url, f"Create a new {name}", body),
            self._request(f"Update {name}", "PUT", item_url, f"Update an existing {name}", body),
            self._request(f"Delete {name}", "DELETE", item_url, f"Delete one {name} by ID"),
        ]

    @staticmethod
    def _url(lower: str, *extra: str) -> Dict[str, Any]:
        path = ["api", lower, *extra]
        return {
            "raw": "{{baseUrl}}/" + "/".join(path),
            "host": ["{{baseUrl}}"],
            "path": path,
        }

    @staticmethod
    def _request(name: str, method: str, url: Dict[str, Any], description: str,
                 body: Optional[str] = None) -> Dict[str, Any]:
        request: Dict[str, Any] = {
            "method": method,
            "header": [dict(h) for h in JSON_HEADERS],
            "url": url,
            "description": description,
        }
        if body is not None:
            request["body"] = {
                "mode": "raw",
                "raw": body,
                "options": {"raw": {"language": "json"}},
            }
        return {"name": name, "request": request, "response": []}


# Singleton instance
postman_generator = PostmanGeneratorService()
