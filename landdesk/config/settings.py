from landdesk.config.config_settings.config_loader import get_app_config

settings = get_app_config()
