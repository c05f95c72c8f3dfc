from rest_framework import serializers

from .models import Payment


class PaymentRequestSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    # validated by the ledger so bad amounts surface as InvalidAmount
    amount = serializers.CharField()
    month = serializers.IntegerField()
    year = serializers.IntegerField()


class PaymentSerializer(serializers.ModelSerializer):
    student_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "student_id",
            "amount",
            "month",
            "year",
            "status",
            "method",
            "external_reference",
            "created_at",
            "settled_at",
        ]
        read_only_fields = fields
