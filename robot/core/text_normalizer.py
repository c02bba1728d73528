import re

CLEAN_REPLACEMENTS = [
    ('\u200b', ''),
    ('\ufeff', ''),
    ('\xad', ''),
]

def strip_invisible_chars(text: str) -> str: ##     Remove caracteres de largura zero que quebram as âncoras
    for pat, repl in CLEAN_REPLACEMENTS:
        text = text.replace(pat, repl)

    return text

def collapse_whitespace(text: str) -> str: ##     Quebras de linha, tabs e \xa0 viram um único espaço
    return re.sub(r'\s+', ' ', text).strip()

def normalize_text(text: str) -> str:
    """
    Converte o texto bruto do ofício em uma única linha.

    As âncoras dos extratores ("na oficina", "referente ao serviço", ...)
    podem atravessar quebras de linha do documento original, por isso
    todos os extratores operam sobre esta forma, nunca sobre o texto bruto.
    """
    if not text:
        return ""

    text = strip_invisible_chars(text)

    return collapse_whitespace(text)
