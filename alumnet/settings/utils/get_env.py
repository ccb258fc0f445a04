import os
import dj_database_url


class EnvHandler:
    """
    Reads environment variables with defaults and type casting.
    """

    def get(self, variable_name, default=None, cast_to=str):
        """
        Return `variable_name` from the environment cast to `cast_to`.

        A variable with no value and no default is a misconfiguration and
        raises immediately so the process never boots half-configured.
        """
        value = os.environ.get(variable_name, default)

        if value is None:
            raise ValueError(
                f"Critical setting '{variable_name}' is not set in the environment!"
            )

        if cast_to == bool:
            return str(value).lower() in ["true", "1", "t", "yes"]

        try:
            return cast_to(value)
        except (ValueError, TypeError):
            raise TypeError(
                f"Could not cast environment variable '{variable_name}' to {cast_to.__name__}."
            )

    def list(self, variable_name, default=""):
        """Comma separated variable as a list of stripped, non-empty strings."""
        raw = self.get(variable_name, default=default)
        return [item.strip() for item in raw.split(",") if item.strip()]

    def db(self, variable_name="DATABASE_URL", default=None):
        """
        Parse a database URL (postgres://, sqlite:///...) into a Django
        DATABASES entry.
        """
        db_url_string = self.get(variable_name, default=default, cast_to=str)

        return dj_database_url.parse(
            db_url_string,
            conn_max_age=600,
            conn_health_checks=True,
        )


env = EnvHandler()
