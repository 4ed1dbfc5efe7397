# Repositories package: one module per entity, all on top of database.execute
