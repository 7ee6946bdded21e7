"""Expert maintenance advice from the Gemini ``generateContent`` REST endpoint.

:meth:`AdviceService.advise` never raises: any failure degrades to a fixed,
human-readable Korean fallback string which is stored like ordinary text.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any
from urllib.parse import quote
from urllib.request import Request, urlopen

from .config import AdviceConfig

LOGGER = logging.getLogger(__name__)

EMPTY_RESPONSE_FALLBACK = "현재 분석 정보를 생성할 수 없습니다."
ERROR_FALLBACK = "AI 통찰력을 생성하는 중 오류가 발생했습니다. 연결 상태를 확인하세요."

_PROMPT_TEMPLATE = """당신은 20년 경력의 베테랑 산업 유지보수 엔지니어입니다. 다음 고장 사례에 대해 전문가 수준의 분석과 '단계별 해결 가이드'를 작성하세요.

[분석 대상]
설비명: {equipment}
보고된 원인: {cause}

[작성 가이드라인]
1. '원인 분석'과 '권고 조치' 두 섹션으로 나누어 작성하세요.
2. 권고 조치는 1, 2, 3 단계별로 구체적인 행동(Action)을 제시하세요.
3. 답변은 반드시 한국어로 작성하며 총 300자 이내로 간결하면서도 전문적으로 작성하세요.
4. 현장 엔지니어가 즉시 참고할 수 있는 실질적인 팁을 포함하세요."""


def build_prompt(equipment_name: str, cause: str) -> str:
    return _PROMPT_TEMPLATE.format(equipment=equipment_name, cause=cause)


def extract_response_text(payload: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate, or ``""``."""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict)).strip()


class AdviceService:
    def __init__(self, config: AdviceConfig, *, api_key: str | None = None) -> None:
        self._config = config
        self._api_key = api_key if api_key is not None else os.environ.get(config.api_key_env, "")

    def _request_url(self) -> str:
        base = self._config.endpoint.rstrip("/")
        return f"{base}/models/{quote(self._config.model)}:generateContent"

    def _generate(self, prompt: str) -> dict[str, Any]:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.6, "topP": 0.9},
        }
        req = Request(
            self._request_url(),
            data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
            headers={"Content-Type": "application/json", "x-goog-api-key": self._api_key},
            method="POST",
        )
        with urlopen(req, timeout=self._config.timeout_s) as resp:
            return json.loads(resp.read().decode("utf-8"))

    async def advise(self, equipment_name: str, cause: str) -> str:
        if not self._config.enabled or not self._api_key:
            LOGGER.warning("Advice service disabled or missing API key; using fallback text")
            return ERROR_FALLBACK
        prompt = build_prompt(equipment_name, cause)
        try:
            payload = await asyncio.wait_for(
                asyncio.to_thread(self._generate, prompt),
                timeout=self._config.timeout_s,
            )
        except Exception as exc:
            LOGGER.warning("Advice service request failed: %s", exc)
            return ERROR_FALLBACK
        return extract_response_text(payload) or EMPTY_RESPONSE_FALLBACK
