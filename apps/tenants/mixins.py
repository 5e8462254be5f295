from rest_framework.pagination import PageNumberPagination


class HotelPagination(PageNumberPagination):
    """Default pagination for hotel listings."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class TenantScopedMixin:
    """
    Restrict a viewset to the caller's hotel.

    Rows of other hotels never appear in listings and resolve to 404 on
    detail routes because get_object() goes through get_queryset().
    New rows are stamped with the caller's tenant.
    """

    def get_queryset(self):
        return super().get_queryset().filter(tenant_id=self.request.user.tenant_id)

    def perform_create(self, serializer):
        serializer.save(tenant=self.request.user.tenant)
