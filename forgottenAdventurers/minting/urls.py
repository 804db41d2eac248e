from django.urls import path
from . import mint_views, ops_views

urlpatterns = [
    path("api/stats/", mint_views.mint_stats, name="mint_stats"),
    path("api/request-mint/", mint_views.request_mint, name="request_mint"),
    path("api/fulfill/", mint_views.fulfill_randomness, name="fulfill_randomness"),
    path("api/finish-mint/<str:request_id>/", mint_views.finish_mint, name="finish_mint"),
    path("api/request/<str:request_id>/", mint_views.request_status, name="request_status"),
    path("api/token/<int:token_id>/", mint_views.token_metadata, name="token_metadata"),
    path("api/network-info/", ops_views.network_info, name="network_info"),
    path("api/onchain-stats/", ops_views.onchain_stats, name="onchain_stats"),
    path("health/live/", ops_views.health_live, name="health_live"),
    path("health/ready/", ops_views.health_ready, name="health_ready"),
]
