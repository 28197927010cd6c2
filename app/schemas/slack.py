from pydantic import BaseModel
from typing import Dict, List


class SlackCommand(BaseModel):
    command: str = ""
    text: str = ""
    user_id: str = ""
    channel_id: str = ""
    response_url: str = ""
    trigger_id: str = ""

    @classmethod
    def from_form(cls, form: Dict[str, List[str]]) -> "SlackCommand":
        """Build from ``parse_qs`` output, taking the first value of each field."""
        return cls(**{
            name: form.get(name, [""])[0]
            for name in cls.model_fields
        })
