from app.services.postman_generator import PostmanGeneratorService, postman_generator
from app.services.spring_generator import SpringGeneratorService, spring_generator

__all__ = [
    "PostmanGeneratorService",
    "postman_generator",
    "SpringGeneratorService",
    "spring_generator",
]
