# users/views.py
"""
USER VIEWS

- Register / Login (anon, throttled) + Me (user, throttled)
- Profile with PF/PJ documents
- Saved addresses (owner-scoped)
- Customers listing for the back office (capability: customers.view)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models import Count, DecimalField, Max, Q, Sum, Value
from django.db.models.functions import Coalesce
from rest_framework import filters, generics, mixins, status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from permissions.roles import CAP_CUSTOMERS_VIEW, ROLE_CUSTOMER, HasCapability
from sales.models import Order
from users.models import CustomerProfile, UserAddress

from .serializers import (
    CustomerSerializer,
    LoginSerializer,
    ProfileSerializer,
    RegisterSerializer,
    UserAddressSerializer,
    UserSerializer,
)

User = get_user_model()


# ---------------- THROTTLES (TARGETED) ----------------
class RegisterAnonThrottle(AnonRateThrottle):
    scope = "anon"


class LoginAnonThrottle(AnonRateThrottle):
    scope = "anon"


class MeUserThrottle(UserRateThrottle):
    scope = "user"


# ---------------- REGISTER ----------------
class RegisterView(generics.GenericAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [RegisterAnonThrottle]

    def post(self, request):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return Response(
            {
                "message": "User registered successfully",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


# ---------------- LOGIN (JWT + EMAIL) ----------------
class LoginView(generics.GenericAPIView):
    serializer_class = LoginSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginAnonThrottle]

    def post(self, request):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = User.objects.normalize_email(serializer.validated_data["email"])
        password = serializer.validated_data["password"]

        user = User.objects.filter(email__iexact=email).first()
        if user is None or not user.check_password(password):
            return Response(
                {"detail": "Invalid email or password"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if not user.is_active:
            return Response(
                {"detail": "User account is disabled"},
                status=status.HTTP_403_FORBIDDEN,
            )

        refresh = RefreshToken.for_user(user)

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )


# ---------------- CURRENT USER ----------------
class MeView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [MeUserThrottle]

    def get(self, request):
        return Response(
            {
                "authenticated": True,
                "user": UserSerializer(request.user).data,
            },
            status=status.HTTP_200_OK,
        )


# ---------------- PROFILE ----------------
class ProfileView(generics.RetrieveUpdateAPIView):
    """
    GET/PUT/PATCH /api/auth/profile/

    The profile row is created on first access for accounts made
    outside the register endpoint (admin, createsuperuser).
    """

    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]
    throttle_classes = [MeUserThrottle]

    def get_object(self):
        profile, _ = CustomerProfile.objects.get_or_create(
            user=self.request.user,
            defaults={"full_name": self.request.user.full_name},
        )
        return profile


# ---------------- ADDRESSES ----------------
class UserAddressViewSet(viewsets.ModelViewSet):
    serializer_class = UserAddressSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return UserAddress.objects.filter(user=self.request.user)

    def perform_create(self, serializer):
        has_default = UserAddress.objects.filter(
            user=self.request.user, is_default=True
        ).exists()
        # first saved address becomes the default
        if not has_default:
            serializer.save(user=self.request.user, is_default=True)
        else:
            serializer.save(user=self.request.user)


# ---------------- CUSTOMERS (BACK OFFICE) ----------------
class CustomerViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    GET /api/auth/customers/?search=<text>

    total_spent only counts orders whose payment was confirmed.
    """

    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CUSTOMERS_VIEW
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["email", "first_name", "last_name", "profile__phone"]
    ordering_fields = ["created_at", "order_count", "total_spent"]

    def get_queryset(self):
        paid = Q(orders__status__in=Order.PAID_STATUSES)
        return (
            User.objects.filter(role=ROLE_CUSTOMER)
            .select_related("profile")
            .annotate(
                order_count=Count("orders", distinct=True),
                total_spent=Coalesce(
                    Sum("orders__total_amount", filter=paid),
                    Value(0),
                    output_field=DecimalField(max_digits=12, decimal_places=2),
                ),
                last_order_at=Max("orders__created_at"),
            )
            .order_by("-created_at")
        )
