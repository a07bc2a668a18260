from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group
from django.urls import reverse
from django.utils.html import format_html

from .models import (
    User, Block, Conversation, ConversationHide, Message, MessageHide, Notification
)

# ==================== ADMIN CLASSES ====================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'email', 'is_staff', 'is_superuser', 'date_joined')
    search_fields = ('username', 'email')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Preferences', {'fields': ('timezone',)}),
    )


@admin.register(Block)
class BlockAdmin(admin.ModelAdmin):
    list_display = ('id', 'blocker', 'blocked', 'timestamp')
    search_fields = ('blocker__username', 'blocked__username')


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ('id', 'participant_low', 'participant_high', 'created_at', 'last_activity_at', 'message_count')
    list_filter = ('created_at',)
    search_fields = ('participant_low__username', 'participant_high__username')
    readonly_fields = ('participant_low', 'participant_high')

    def message_count(self, obj):
        return obj.messages.count()
    message_count.short_description = 'Messages'


@admin.register(ConversationHide)
class ConversationHideAdmin(admin.ModelAdmin):
    list_display = ('id', 'conversation', 'viewer', 'hidden_at')
    search_fields = ('viewer__username',)


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'conversation_link', 'sender', 'kind', 'created_at', 'is_tombstoned', 'is_read', 'content_short')
    list_filter = ('kind', 'is_tombstoned', 'is_read', 'created_at')
    search_fields = ('content', 'sender__username')

    def conversation_link(self, obj):
        url = reverse("admin:messaging_conversation_change", args=[obj.conversation_id])
        return format_html('<a href="{}">DM #{}</a>', url, obj.conversation_id)
    conversation_link.short_description = 'Conversation'

    def content_short(self, obj):
        if obj.content:
            return obj.content[:50] + '...' if len(obj.content) > 50 else obj.content
        return "(empty)"
    content_short.short_description = 'Content'


@admin.register(MessageHide)
class MessageHideAdmin(admin.ModelAdmin):
    list_display = ('id', 'message', 'viewer', 'hidden_at')
    search_fields = ('viewer__username',)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'actor', 'verb', 'created_at', 'is_read')
    list_filter = ('is_read', 'created_at')
    search_fields = ('user__username', 'actor__username', 'verb')

# Unregister Django's default Group
admin.site.unregister(Group)

# Basic admin site configuration
admin.site.site_header = "Social DM Admin"
admin.site.site_title = "Social DM Admin Portal"
admin.site.index_title = "Welcome"
