# quack_companion/services/diagnostics.py
import platform
import sys
from typing import Optional

from ..core.config import Settings
from ..schemas.diagnostics import EnvInfo


def get_env_info(settings: Settings, session_id: str, endpoint_url: Optional[str]) -> EnvInfo:
    return EnvInfo(
        version=settings.VERSION,
        python_version=sys.version.split()[0],
        platform=f"{platform.system()} {platform.release()}".strip(),
        session_id=session_id,
        endpoint_url=endpoint_url
    )
