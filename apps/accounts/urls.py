from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'accounts'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.UserViewSet, basename='user')

urlpatterns = [
    # User ViewSet routes
    # GET    /api/users/                          - Search users
    # POST   /api/users/                          - Create user (admin)
    # GET    /api/users/{id}/                     - Get user details
    # PUT    /api/users/{id}/                     - Update user (admin or self)
    # PATCH  /api/users/{id}/                     - Partial update (admin or self)
    # DELETE /api/users/{id}/                     - Delete user without records (admin)

    # Custom user actions
    # PATCH  /api/users/{id}/activate/            - Re-activate user (admin)
    # PATCH  /api/users/{id}/deactivate/          - Deactivate user (admin)
    # PATCH  /api/users/{id}/change_password/     - Set new password
    # POST   /api/users/{id}/verify_password/     - Check a password
    # GET    /api/users/{id}/outstanding/         - Outstanding invoice total
    # GET    /api/users/clients/                  - Active clients
    # GET    /api/users/suppliers/                - Active suppliers
    # GET    /api/users/outstanding_invoices/     - Users with unpaid invoices
    # GET    /api/users/statistics/               - User counts per type

    # Include router URLs
    path('', include(router.urls)),
]
