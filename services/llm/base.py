from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class LLMClient(ABC):
    @abstractmethod
    async def generate_json(self, system_prompt: str, user_prompt: str,
                            temperature: Optional[float] = None,
                            max_tokens: Optional[int] = None) -> Dict[str, Any]: ...
