from crosspost.config import Settings


def test_configured_providers_need_id_and_secret():
    settings = Settings(
        x_client_id="x-id",
        x_client_secret="x-secret",
        linkedin_client_id="li-id",
        facebook_client_id="",
        facebook_client_secret="",
        linkedin_client_secret="",
    )
    assert "x" in settings.configured_providers()
    assert "linkedin" not in settings.configured_providers()


def test_redirect_uri_strips_trailing_slash():
    settings = Settings(api_base_url="https://api.crosspost.test/")
    assert settings.redirect_uri("x") == "https://api.crosspost.test/api/v1/connections/x/callback"


def test_unknown_provider_has_no_client():
    assert Settings().oauth_client("myspace") == ("", "")
