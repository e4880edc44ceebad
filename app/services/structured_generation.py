import logging
from typing import Any, Optional, Protocol, Type, Union

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel

from app.core.exceptions import PredictionParseError
from app.core.genai_client import get_chat_model

logger = logging.getLogger(__name__)

StructuredPayload = Union[dict[str, Any], str]


class StructuredGenerator(Protocol):
    """Text generation constrained to a declared output schema."""

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        output_schema: Type[BaseModel],
    ) -> StructuredPayload: ...


def _build_structured_chain(model, schema):
    prompt = ChatPromptTemplate.from_messages(
        [("system", "{system_prompt}"), ("human", "{input_text}")]
    )
    return prompt | model.with_structured_output(
        schema, method="json_schema", include_raw=True
    )


class GeminiStructuredGenerator:
    """StructuredGenerator backed by Gemini through langchain."""

    def __init__(self, model: Optional[str] = None, **model_kwargs) -> None:
        self._model = model
        self._model_kwargs = model_kwargs

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        output_schema: Type[BaseModel],
    ) -> StructuredPayload:
        chain = _build_structured_chain(
            get_chat_model(model=self._model, **self._model_kwargs),
            output_schema,
        )
        result = await chain.ainvoke(
            {"system_prompt": system_instruction, "input_text": prompt}
        )

        parsing_error = result.get("parsing_error")
        if parsing_error is not None:
            logger.warning(
                "Gemini response did not match %s: %s",
                output_schema.__name__,
                parsing_error,
            )
            raise PredictionParseError(
                f"AI response did not match the {output_schema.__name__} schema"
            ) from parsing_error

        parsed = result.get("parsed")
        if parsed is None:
            raise PredictionParseError("AI returned an empty response")
        if isinstance(parsed, BaseModel):
            return parsed.model_dump(mode="json", by_alias=True)
        return parsed
