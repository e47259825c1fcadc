"""Environment settings."""

import os
from typing import Dict, List

VERSION = "0.1.0"


class Settings:
    """Application settings from environment variables."""

    @staticmethod
    def get(key: str) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name

        Returns:
            str: Environment variable value, empty if unset
        """
        return os.getenv(key, "")

    @staticmethod
    def get_list(key: str) -> List[str]:
        """Comma separated environment variable as a list (empty items dropped)."""
        return [item.strip() for item in Settings.get(key).split(",") if item.strip()]

    @staticmethod
    def overrides() -> Dict[str, Dict[str, object]]:
        """
        Configuration values set through ``KAMAILIO_*`` environment variables.

        Returns:
            Dict shaped like the configuration file, containing only the
            sections and keys whose variable is set
        """
        kamailio = {}
        web = {}
        if Settings.get("KAMAILIO_RPC_URI"):
            kamailio["rpc_uri"] = Settings.get("KAMAILIO_RPC_URI")
        if Settings.get("KAMAILIO_TIMEOUT"):
            kamailio["timeout_seconds"] = Settings.get("KAMAILIO_TIMEOUT")
        if Settings.get("KAMAILIO_DISPATCHER_MAP"):
            kamailio["dispatcher_map"] = Settings.get_list("KAMAILIO_DISPATCHER_MAP")
        if Settings.get("KAMAILIO_DIALOG_PROFILES"):
            kamailio["dialog_profiles"] = Settings.get_list("KAMAILIO_DIALOG_PROFILES")
        if Settings.get("KAMAILIO_LISTEN_ADDRESS"):
            web["listen_address"] = Settings.get("KAMAILIO_LISTEN_ADDRESS")
        if Settings.get("KAMAILIO_LISTEN_PORT"):
            web["listen_port"] = Settings.get("KAMAILIO_LISTEN_PORT")
        if Settings.get("KAMAILIO_METRICS_PATH"):
            web["metrics_path"] = Settings.get("KAMAILIO_METRICS_PATH")
        if Settings.get("KAMAILIO_CUSTOM_METRICS_URL"):
            web["custom_metrics_url"] = Settings.get("KAMAILIO_CUSTOM_METRICS_URL")
        if Settings.get("KAMAILIO_RTP_METRICS_PATH"):
            web["rtp_metrics_path"] = Settings.get("KAMAILIO_RTP_METRICS_PATH")
        if Settings.get("KAMAILIO_RTPENGINE_METRICS_URL"):
            web["rtpengine_metrics_url"] = Settings.get("KAMAILIO_RTPENGINE_METRICS_URL")

        result = {}
        if kamailio:
            result["kamailio"] = kamailio
        if web:
            result["web"] = web
        if Settings.get("LOG_LEVEL"):
            result["log_level"] = Settings.get("LOG_LEVEL")
        return result
