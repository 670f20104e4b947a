"""
Couche domaine de TokenQueue.

- entities/ : Operations en file et leur cycle de vie
- ports/ : Interfaces vers le wallet et le service d'association
- value_objects/ : Resultats, statistiques, configuration des tokens
- errors : Taxonomie des erreurs
"""
