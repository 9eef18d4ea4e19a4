import logging
import requests
from datetime import datetime, timezone

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()


class SlackErrorHandler(logging.Handler):
    """Sends ERROR and CRITICAL logs to a Slack incoming webhook"""

    def __init__(self, webhook: str = configs.SLACK_WEBHOOK_URL):
        super().__init__(level=logging.ERROR)
        self.webhook = webhook
        self.enabled = bool(webhook)

    def build_text(self, record) -> str:
        env = configs.APPLICATION_ENVIRONMENT.upper()
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        lines = [
            f":mag: {env}-MONITOR {configs.APP_NAME} reported an error",
            "",
            f"- :clock1: Timestamp: {ts}",
            f"- :triangular_flag_on_post: Level: *{record.levelname}*",
            f"- :warning: Logger: {record.name}",
            f"- :file_folder: Module: {record.module}",
            f"- :pushpin: Function: {record.funcName}",
            f"- :straight_ruler: Line Number: {record.lineno}",
            "",
            "```" + record.getMessage() + "```",
        ]
        return "\n".join(lines)

    def emit(self, record):
        if not self.enabled:
            return
        try:
            requests.post(self.webhook, json={"text": self.build_text(record)}, timeout=2)
        except requests.RequestException:
            self.handleError(record)


slack_handler = SlackErrorHandler()
