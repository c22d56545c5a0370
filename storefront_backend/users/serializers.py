from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from users.models import Address

User = get_user_model()


# ---------------- REGISTER ----------------
class RegisterSerializer(serializers.ModelSerializer):
    """
    Public sign-up.

    Admin accounts are never created here; pro accounts start unvalidated.
    """

    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    role = serializers.ChoiceField(
        choices=[User.ROLE_CUSTOMER, User.ROLE_PRO],
        default=User.ROLE_CUSTOMER,
    )

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "first_name",
            "last_name",
            "phone",
            "role",
            "company_name",
            "siret",
            "vat_number",
        ]

    def validate(self, attrs):
        if attrs.get("role") == User.ROLE_PRO and not attrs.get("company_name"):
            raise serializers.ValidationError({"company_name": "Required for professional accounts."})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        return User.objects.create_user(password=password, **validated_data)


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone",
            "role",
            "company_name",
            "is_validated",
            "discount_rate",
        ]
        read_only_fields = fields


# ---------------- ADDRESSES ----------------
class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = [
            "id",
            "type",
            "street",
            "city",
            "postal_code",
            "country",
            "is_default",
            "created_at",
        ]
        read_only_fields = ["id", "created_at"]
