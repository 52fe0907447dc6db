from typing import Any, TypeAlias


# Type aliases for API Gateway proxy integration payloads
LambdaEvent: TypeAlias = dict[str, Any]
LambdaContext: TypeAlias = Any
LambdaResponse: TypeAlias = dict[str, Any]
