"""不可猜测的短 token 生成

用于分享 token（默认 10 位）与 Webhook token（默认 32 位）。
字母表与 nanoid 一致（URL 安全，64 个字符），使用 secrets 提供密码学随机性。
"""

import secrets

URL_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"


def generate_token(size: int = 21) -> str:
    """生成指定长度的随机 token

    参数：
        size: token 长度（必须为正数）

    返回：
        由 URL 安全字符组成的字符串
    """
    if size <= 0:
        raise ValueError("size 必须为正数")
    return "".join(secrets.choice(URL_ALPHABET) for _ in range(size))
