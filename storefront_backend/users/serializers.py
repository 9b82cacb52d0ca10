# users/serializers.py

import string

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from permissions.roles import ROLE_CUSTOMER
from users.accounts import (
    ACCOUNT_BUSINESS,
    ACCOUNT_PERSONAL,
    ACCOUNT_TYPE_CHOICES,
    AccountInfoError,
    BusinessAccountInfo,
    PersonalAccountInfo,
    account_info_as_dict,
    account_info_from_profile,
    apply_account_info,
)
from users.models import CustomerProfile, UserAddress

User = get_user_model()


# ---------------- REGISTER ----------------
class RegisterSerializer(serializers.ModelSerializer):
    """
    Public sign-up. Always creates a customer; staff roles are granted by an admin.
    """

    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    phone = serializers.CharField(required=False, allow_blank=True, write_only=True)

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "first_name",
            "last_name",
            "phone",
        ]

    def create(self, validated_data):
        phone = validated_data.pop("phone", "")
        user = User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            first_name=validated_data.get("first_name", ""),
            last_name=validated_data.get("last_name", ""),
            role=ROLE_CUSTOMER,
        )
        CustomerProfile.objects.create(
            user=user,
            full_name=user.full_name,
            phone=(phone or "").strip(),
        )
        return user


# ---------------- LOGIN (INPUT ONLY) ----------------
class LoginSerializer(serializers.Serializer):
    """
    Input validation only. Authentication is handled in the view.
    """

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "role",
        ]


# ---------------- ACCOUNT VARIANTS ----------------
class PersonalAccountSerializer(serializers.Serializer):
    cpf = serializers.CharField()
    birth_date = serializers.DateField(required=False, allow_null=True)

    def to_info(self) -> PersonalAccountInfo:
        return PersonalAccountInfo(**self.validated_data)


class BusinessAccountSerializer(serializers.Serializer):
    cnpj = serializers.CharField()
    state_registration = serializers.CharField(required=False, allow_blank=True, default="")
    xml_email = serializers.EmailField(required=False, allow_blank=True, default="")

    def to_info(self) -> BusinessAccountInfo:
        return BusinessAccountInfo(**self.validated_data)


ACCOUNT_SERIALIZERS = {
    ACCOUNT_PERSONAL: PersonalAccountSerializer,
    ACCOUNT_BUSINESS: BusinessAccountSerializer,
}


class ProfileSerializer(serializers.ModelSerializer):
    """
    Profile read/update.

    Writing documents requires `account_type` + `account` together; the
    `account` payload is validated by the serializer of that variant only.
    """

    email = serializers.EmailField(source="user.email", read_only=True)
    account_type = serializers.ChoiceField(choices=ACCOUNT_TYPE_CHOICES, required=False)
    account = serializers.DictField(write_only=True, required=False)
    account_info = serializers.SerializerMethodField()

    class Meta:
        model = CustomerProfile
        fields = [
            "email",
            "full_name",
            "phone",
            "account_type",
            "account",
            "account_info",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]

    def get_account_info(self, obj):
        return account_info_as_dict(account_info_from_profile(obj))

    def validate(self, attrs):
        raw_account = attrs.pop("account", None)
        account_type = attrs.pop("account_type", None)

        if raw_account is None and account_type is None:
            return attrs

        if raw_account is None:
            raise serializers.ValidationError(
                {"account": "Account documents are required when changing account type."}
            )

        account_type = account_type or getattr(self.instance, "account_type", ACCOUNT_PERSONAL)
        variant = ACCOUNT_SERIALIZERS[account_type](data=raw_account)
        if not variant.is_valid():
            raise serializers.ValidationError({"account": variant.errors})

        try:
            attrs["account_info"] = variant.to_info()
        except AccountInfoError as exc:
            raise serializers.ValidationError({"account": str(exc)})

        return attrs

    def update(self, instance, validated_data):
        info = validated_data.pop("account_info", None)

        for field, value in validated_data.items():
            setattr(instance, field, value)

        if info is not None:
            apply_account_info(instance, info)

        instance.full_clean()
        instance.save()
        return instance


# ---------------- ADDRESSES ----------------
class UserAddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserAddress
        fields = [
            "id",
            "label",
            "postal_code",
            "street",
            "number",
            "complement",
            "neighborhood",
            "city",
            "state",
            "country",
            "is_default",
            "created_at",
        ]
        read_only_fields = ["id", "created_at"]

    def validate_postal_code(self, value):
        digits = "".join(ch for ch in str(value or "") if ch in string.digits)
        if len(digits) != 8:
            raise serializers.ValidationError("CEP must have 8 digits")
        return digits


# ---------------- CUSTOMERS (BACK OFFICE) ----------------
class CustomerSerializer(serializers.ModelSerializer):
    """
    Staff view of a customer: identity, profile summary, order stats.
    order_count / total_spent come from queryset annotations.
    """

    phone = serializers.CharField(source="profile.phone", read_only=True)
    account_type = serializers.CharField(source="profile.account_type", read_only=True)
    order_count = serializers.IntegerField(read_only=True)
    total_spent = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    last_order_at = serializers.DateTimeField(read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone",
            "account_type",
            "order_count",
            "total_spent",
            "last_order_at",
            "created_at",
        ]
