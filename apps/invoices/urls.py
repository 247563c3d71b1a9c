from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'invoices'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.InvoiceViewSet, basename='invoice')

urlpatterns = [
    # Invoice ViewSet routes
    # GET    /api/invoices/                         - Search invoices
    # POST   /api/invoices/                         - Create invoice (optionally with items)
    # GET    /api/invoices/{id}/                    - Get invoice details
    # PUT    /api/invoices/{id}/                    - Update invoice
    # PATCH  /api/invoices/{id}/                    - Partial update
    # DELETE /api/invoices/{id}/                    - Delete invoice without payments

    # Custom invoice actions
    # POST   /api/invoices/{id}/payments/           - Record a payment
    # POST   /api/invoices/{id}/cancel/             - Cancel invoice
    # POST   /api/invoices/{id}/items/              - Add line item
    # DELETE /api/invoices/{id}/items/{item_id}/    - Remove line item
    # GET    /api/invoices/number/{invoice_number}/ - Look up by number
    # GET    /api/invoices/next_number/             - Preview next number
    # GET    /api/invoices/overdue/                 - Past-due unsettled invoices
    # GET    /api/invoices/outstanding/             - Open/partially paid/overdue
    # GET    /api/invoices/recent/?limit=10         - Latest invoices
    # GET    /api/invoices/due_within/?days=7       - Falling due soon
    # GET    /api/invoices/statistics/              - Counts and totals
    # GET    /api/invoices/top_clients/             - Users by invoiced total

    # Include router URLs
    path('', include(router.urls)),
]
