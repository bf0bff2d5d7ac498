"""
Сервисы каталога: хранилище коллекции, кодек документов, валидация,
слияние при импорте, фильтрация, экспорт/импорт и фасад ContractService.
"""
