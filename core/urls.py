from django.urls import path, include
from django.shortcuts import redirect
from django.http import JsonResponse
from . import urls_api_v1


def root_redirect(request):
    """
    Handle root URL based on client type.

    - API clients (Accept: application/json): JSON with API info
    - Browser clients: Google sign-in via allauth
    """
    accept = request.META.get('HTTP_ACCEPT', '')
    if 'application/json' in accept:
        return JsonResponse({
            'success': True,
            'message': 'RoutineOS API',
            'version': '1.0',
            'endpoints': {
                'api_v1': '/api/v1/',
                'health': '/api/v1/health/',
                'auth': '/api/v1/auth/google/',
            },
            'authenticated': request.user.is_authenticated
        })

    return redirect('/accounts/login/')


urlpatterns = [
    path('', root_redirect, name='root'),

    # Versioned API
    path('api/v1/', include((urls_api_v1.urlpatterns, 'api_v1'), namespace='api_v1')),

    # Unversioned aliases
    path('api/', include((urls_api_v1.urlpatterns, 'api'), namespace='api')),
]
