"""
Extracts display text from generative-AI responses.

The summary proxy passes the upstream payload through untouched, and different
providers answer in different shapes. Each known shape has a parser that
returns the text or None; the first parser with an answer wins. Anything
unrecognised falls back to a shallow walk of the payload and, at worst, to
its JSON serialization. extract_model_text never raises.
"""
import json
import logging

logger = logging.getLogger(__name__)

WALK_DEPTH = 3
# guards _fragments against self-referencing payloads
MAX_NESTING = 8


def _fragments(node, depth=0):
    """Text pieces of a content-like node: a string, a list of parts, {text}, {parts}."""
    if depth > MAX_NESTING or node is None:
        return []
    if isinstance(node, str):
        return [node] if node else []
    if isinstance(node, list):
        pieces = []
        for item in node:
            pieces.extend(_fragments(item, depth + 1))
        return pieces
    if isinstance(node, dict):
        if isinstance(node.get('text'), str):
            return [node['text']] if node['text'] else []
        for key in ('parts', 'content'):
            if key in node:
                return _fragments(node[key], depth + 1)
    return []


def parse_plain_string(payload):
    if isinstance(payload, str):
        return payload
    return None


def parse_text_field(payload):
    if not isinstance(payload, dict):
        return None
    for key in ('summary', 'text', 'output_text'):
        value = payload.get(key)
        if isinstance(value, str):
            return value
    return None


def parse_responses_output(payload):
    if not isinstance(payload, dict) or not isinstance(payload.get('output'), list):
        return None
    pieces = []
    for element in payload['output']:
        if isinstance(element, dict) and 'content' in element:
            pieces.extend(_fragments(element['content']))
        elif isinstance(element, dict) and isinstance(element.get('text'), str):
            pieces.append(element['text'])
        elif isinstance(element, str):
            pieces.append(element)
    pieces = [piece for piece in pieces if piece]
    return '\n\n'.join(pieces) if pieces else None


def parse_candidates(payload):
    if not isinstance(payload, dict) or not isinstance(payload.get('candidates'), list):
        return None
    if not payload['candidates'] or not isinstance(payload['candidates'][0], dict):
        return None
    candidate = payload['candidates'][0]

    for key in ('output', 'content'):
        pieces = _fragments(candidate.get(key))
        if pieces:
            return '\n\n'.join(pieces)

    for key in ('outputText', 'content', 'message'):
        value = candidate.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def parse_choices(payload):
    if not isinstance(payload, dict) or not isinstance(payload.get('choices'), list):
        return None
    if not payload['choices'] or not isinstance(payload['choices'][0], dict):
        return None
    choice = payload['choices'][0]

    if isinstance(choice.get('text'), str) and choice['text']:
        return choice['text']

    message = choice.get('message')
    if isinstance(message, str) and message:
        return message
    if isinstance(message, dict):
        content = message.get('content')
        if isinstance(content, str) and content:
            return content
        if isinstance(content, list):
            pieces = []
            for part in content:
                if isinstance(part, str):
                    pieces.append(part)
                elif isinstance(part, dict) and isinstance(part.get('text'), str):
                    pieces.append(part['text'])
            pieces = [piece for piece in pieces if piece]
            if pieces:
                return '\n'.join(pieces)
    return None


def _leaf_text(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value or None
    return None


def walk_leaves(node, depth=0, max_depth=WALK_DEPTH):
    """String, number and boolean leaves in document order, down to max_depth."""
    leaf = _leaf_text(node)
    if leaf is not None:
        return [leaf]
    if depth >= max_depth:
        return []
    if isinstance(node, dict):
        children = node.values()
    elif isinstance(node, (list, tuple)):
        children = node
    else:
        return []
    leaves = []
    for child in children:
        leaves.extend(walk_leaves(child, depth + 1, max_depth))
    return leaves


def parse_tree_walk(payload):
    leaves = walk_leaves(payload)
    return '\n\n'.join(leaves) if leaves else None


SHAPE_PARSERS = (
    parse_plain_string,
    parse_text_field,
    parse_responses_output,
    parse_candidates,
    parse_choices,
    parse_tree_walk,
)


def _serialize(payload):
    try:
        return json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        pass
    try:
        return str(payload)
    except Exception:
        return ''


def extract_model_text(payload):
    if payload is None:
        return ''
    for parser in SHAPE_PARSERS:
        try:
            text = parser(payload)
        except Exception:
            logger.debug("Parser %s failed", parser.__name__, exc_info=True)
            continue
        if text is not None:
            return text
    return _serialize(payload)
