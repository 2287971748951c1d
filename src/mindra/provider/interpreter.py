"""结果解析 -- 从模型输出中提取结构化结果

模型被要求返回 JSON，但常常包在 ``` 代码块里，或者干脆返回自然语言。
解析失败不是错误：回退为保留原始文本的 TextResult，不丢信息。
"""

import json
import math
import re

from .models import ObjectResult, ResultPayload, TextResult

FENCE = "```"
JSON_FENCE = "```json"
LANGUAGE_TAG = re.compile(r"[\w.+#-]+")


def _reject_constant(name: str) -> None:
    raise ValueError(f"non-standard JSON constant: {name}")


def _parse_finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"float out of range: {literal}")
    return value


def _scan_block(text: str, body_start: int) -> str | None:
    """从 body_start 扫描到下一个 fence，未闭合返回 None"""
    end = text.find(FENCE, body_start)
    if end == -1:
        return None
    return text[body_start:end].strip()


def _skip_language_tag(text: str, pos: int) -> int:
    """跳过开 fence 后同一行的语言标记（如 python、c++），返回正文起点"""
    line_end = text.find("\n", pos)
    if line_end == -1:
        return pos
    tag = text[pos:line_end].strip()
    if LANGUAGE_TAG.fullmatch(tag):
        return line_end + 1
    return pos


def extract_fenced_block(text: str) -> str | None:
    """提取第一个代码块的内容

    规则：
        1. 存在 ```json 时，取第一个 ```json 之后到下一个 ``` 之间的内容
        2. 否则存在 ``` 时，取第一个代码块的内容（跳过可选的语言标记）
        3. 无 fence 或 fence 未闭合 -> None（调用方解析整段文本）

    Returns:
        去除首尾空白的代码块内容，或 None
    """
    json_start = text.find(JSON_FENCE)
    if json_start != -1:
        return _scan_block(text, json_start + len(JSON_FENCE))

    start = text.find(FENCE)
    if start == -1:
        return None
    body_start = _skip_language_tag(text, start + len(FENCE))
    return _scan_block(text, body_start)


def interpret(raw_text: str) -> ResultPayload:
    """将模型原始输出解析为结构化结果

    JSON 对象 -> ObjectResult；其余情况（解析失败、数组、标量、
    含孤立代理项无法 UTF-8 编码）-> TextResult(text=raw_text)，保留未裁剪的原始文本。
    此函数对任意字符串输入都不抛异常。
    """
    fragment = extract_fenced_block(raw_text)
    candidate = raw_text if fragment is None else fragment

    try:
        parsed = json.loads(
            candidate,
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
        if isinstance(parsed, dict):
            # "\ud800" 这类孤立代理项能被 json.loads 接受，但无法编码为 UTF-8 响应体
            json.dumps(parsed, ensure_ascii=False).encode("utf-8")
    except (ValueError, RecursionError):
        return TextResult(text=raw_text)

    if isinstance(parsed, dict):
        return ObjectResult(data=parsed)
    return TextResult(text=raw_text)
