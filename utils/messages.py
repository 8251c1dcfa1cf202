"""
Centralized Portuguese UI messages.
All user-facing text in Portuguese for consistency with the web client.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Bem-vindo, {name}',
    'logout_success': 'Sessão encerrada',
    'reservation_created': 'Reserva criada com sucesso',
    'package_reservation_created': 'Pacote reservado com sucesso: {count} recursos',
    'reservation_approved': 'Reserva aprovada',
    'reservation_rejected': 'Reserva rejeitada',
    'resource_created': 'Recurso criado com sucesso',
    'resource_updated': 'Recurso atualizado com sucesso',
    'package_created': 'Pacote criado com sucesso',
    'package_deleted': 'Pacote excluído',
    'settings_updated': 'Configurações atualizadas',

    # Error messages
    'invalid_credentials': 'E-mail ou senha incorretos',
    'account_inactive': 'Sua conta foi desativada. Contate o administrador.',
    'login_required': 'Autenticação necessária',
    'permission_denied': 'Você não tem permissão para esta ação',
    'data_required': 'Dados obrigatórios',
    'resource_not_found': 'Recurso não encontrado',
    'reservation_not_found': 'Reserva não encontrada',
    'package_not_found': 'Pacote não encontrado',
    'package_empty': 'Pacote sem recursos associados',
    'invalid_window': 'A data de término deve ser posterior à data de início',
    'invalid_timestamp': 'Data/hora inválida: {value}',
    'resource_conflict': 'Recurso indisponível: {available} de {total} vagas livres',
    'resource_maintenance': 'Recurso em manutenção',
    'quantity_below_reserved': ('Quantidade {quantity} menor que as {reserved} reservas '
                                'ativas simultâneas do recurso'),
    'package_conflict': 'Recursos indisponíveis no período: {names}',
    'package_booking_failed': 'Falha ao reservar "{name}"; nenhuma reserva do pacote foi mantida',
    'package_orphaned': ('Falha ao desfazer reservas do pacote após erro em "{name}". '
                         'Reservas órfãs: {ids}'),
    'invalid_transition': 'Não é possível alterar a reserva de "{current}" para "{new}"',
    'invalid_status': 'Status inválido: {status}',
    'max_advance_exceeded': 'Reservas só podem começar até {limit} dias à frente',
    'max_concurrent_exceeded': 'Limite de {limit} reservas simultâneas atingido',
    'internal_error': 'Erro interno. Tente novamente.',

    # Validation messages
    'field_required': 'Campo obrigatório',
    'invalid_value': 'Valor inválido',
}
