from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'banking'

# Router for ViewSets
router = DefaultRouter()
router.register(r'accounts', views.BankAccountViewSet, basename='bank-account')
router.register(r'transactions', views.TransactionViewSet, basename='transaction')

urlpatterns = [
    # Bank account routes
    # GET    /api/banking/accounts/                      - Search accounts
    # POST   /api/banking/accounts/                      - Open account
    # GET    /api/banking/accounts/{id}/                 - Get account
    # PATCH  /api/banking/accounts/{id}/                 - Update descriptive fields
    # DELETE /api/banking/accounts/{id}/                 - Delete account without transactions
    # PATCH  /api/banking/accounts/{id}/activate/        - Re-activate
    # PATCH  /api/banking/accounts/{id}/deactivate/      - Deactivate
    # GET    /api/banking/accounts/{id}/transactions/    - Account ledger
    # GET    /api/banking/accounts/balances/             - Totals of active accounts

    # Transaction routes
    # GET    /api/banking/transactions/                  - Search transactions
    # POST   /api/banking/transactions/                  - Record transaction
    # GET    /api/banking/transactions/{id}/             - Get transaction
    # PATCH  /api/banking/transactions/{id}/             - Edit notes/reference/category
    # DELETE /api/banking/transactions/{id}/             - Delete and reverse balance
    # POST   /api/banking/transactions/{id}/reconcile/   - Mark reconciled
    # GET    /api/banking/transactions/unreconciled/     - Not yet reconciled
    # GET    /api/banking/transactions/recent/           - Most recent
    # GET    /api/banking/transactions/summary/          - Cash-flow summary

    # Include router URLs
    path('', include(router.urls)),
]
