from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

# Scopes needed to access user info
SCOPES = ['https://www.googleapis.com/auth/userinfo.email',
          'https://www.googleapis.com/auth/userinfo.profile',
          'openid']

def build_flow(settings, state=None):
    """Web-server OAuth flow configured from settings."""
    client_config = {
        "web": {
            "client_id": settings.google_client_id,
            "client_secret": settings.google_client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [settings.google_callback_url],
        }
    }
    flow = Flow.from_client_config(client_config, scopes=SCOPES, state=state)
    flow.redirect_uri = settings.google_callback_url
    # No PKCE verifier: the callback runs on a fresh Flow in another request
    flow.autogenerate_code_verifier = False
    return flow

def authorization_url(settings):
    """Return (url, state) for the Google consent screen."""
    flow = build_flow(settings)
    return flow.authorization_url(prompt='select_account', include_granted_scopes='true')

def fetch_google_user_info(settings, code, state=None):
    """
    Exchange the callback code and read the signed-in profile.
    Returns: dict with 'email', 'name', 'picture' (any of them may be None)
    """
    flow = build_flow(settings, state=state)
    flow.fetch_token(code=code)

    # Build People API service
    service = build('people', 'v1', credentials=flow.credentials, cache_discovery=False)
    results = service.people().get(
        resourceName='people/me',
        personFields='emailAddresses,names,photos'
    ).execute()

    # Extract user data
    email = results['emailAddresses'][0]['value'] if results.get('emailAddresses') else None
    name = None
    if results.get('names'):
        names = results['names'][0]
        name = names.get('displayName') or names.get('givenName')
    picture = results['photos'][0]['url'] if results.get('photos') else None

    return {
        'email': email,
        'name': name,
        'picture': picture
    }
